"""Validator contracts and built-in implementations.

Hosts plug in their own analyses by implementing the four family
contracts. Fixture-backed implementations serve recorded findings.
"""

from __future__ import annotations

from projaudit.validators.base import (
    BaseValidator,
    DIValidator,
    ImportValidator,
    UIDataFlowValidator,
    WebhookValidator,
)
from projaudit.validators.connectivity import probe_webhook
from projaudit.validators.fixture import (
    FixtureDIValidator,
    FixtureImportValidator,
    FixtureUIDataFlowValidator,
    FixtureValidators,
    FixtureWebhookValidator,
    empty_validators,
    load_fixture_validators,
    validators_from_dict,
)

__all__ = [
    # Contracts
    "BaseValidator",
    "DIValidator",
    "ImportValidator",
    "UIDataFlowValidator",
    "WebhookValidator",
    # Fixture implementations
    "FixtureDIValidator",
    "FixtureImportValidator",
    "FixtureUIDataFlowValidator",
    "FixtureValidators",
    "FixtureWebhookValidator",
    "empty_validators",
    "load_fixture_validators",
    "validators_from_dict",
    # Connectivity
    "probe_webhook",
]
