import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, List

from modules.contracts.models.signature import SignerParty
from modules.contracts.services.errors import ConfigError

logger = logging.getLogger(__name__)


class RoleClass(Enum):
    CUSTOMER = "CUSTOMER"
    COMPANY = "COMPANY"
    UNCLASSIFIED = "UNCLASSIFIED"


RoleClassifier = Callable[[str], RoleClass]


def classify_role(role: str) -> RoleClass:
    """Classifies a role by naming convention ("customer" is checked first)."""
    lowered = role.lower()
    if "customer" in lowered:
        return RoleClass.CUSTOMER
    if "company" in lowered:
        return RoleClass.COMPANY
    return RoleClass.UNCLASSIFIED


@dataclass
class RequiredRoles:
    customer: List[str] = field(default_factory=list)
    company: List[str] = field(default_factory=list)
    unclassified: List[str] = field(default_factory=list)

    def for_party(self, party: SignerParty) -> List[str]:
        if party == SignerParty.CUSTOMER:
            return list(self.customer)
        return list(self.company)


def extract_roles(config: Any) -> List[str]:
    """
    Returns the role ids declared in config["signatures"], in order and
    without duplicates. Each entry names its role through "role", or "id"
    when "role" is missing. Entries naming no role at all are layout-only
    and skipped; a role that is present but not a non-blank string fails.
    """
    if not isinstance(config, dict):
        raise ConfigError("Contract configuration must be an object")

    entries = config.get("signatures")
    if not isinstance(entries, list):
        raise ConfigError("Contract configuration has no 'signatures' list")

    roles = []
    seen = set()
    for entry in entries:
        if not isinstance(entry, dict):
            raise ConfigError("Every 'signatures' entry must be an object")
        role = entry.get("role") or entry.get("id")
        if role is None:
            continue
        if not isinstance(role, str) or not role.strip():
            raise ConfigError(f"Signature entry has an unusable role identifier: {role!r}")
        if role in seen:
            continue
        seen.add(role)
        roles.append(role)
    return roles


def partition_roles(roles: List[str], classifier: RoleClassifier = classify_role) -> RequiredRoles:
    required = RequiredRoles()
    for role in roles:
        role_class = classifier(role)
        if role_class == RoleClass.CUSTOMER:
            required.customer.append(role)
        elif role_class == RoleClass.COMPANY:
            required.company.append(role)
        else:
            required.unclassified.append(role)

    if required.unclassified:
        logger.warning(
            "Roles %s match neither party and cannot be satisfied", required.unclassified
        )
    return required


def required_roles(config: Any, classifier: RoleClassifier = classify_role) -> RequiredRoles:
    return partition_roles(extract_roles(config), classifier)

