import base64
import binascii
import re
from datetime import datetime
from typing import Dict, List, Optional

from sqlalchemy.orm import Session

from modules.contracts.models.signature import Signature, SignerParty, ROLE_MAX_LENGTH
from modules.contracts.services.errors import InvalidImage, InvalidRole

_IMAGE_DATA_URL = re.compile(
    r"^data:image/(png|jpeg|jpg|gif|webp|svg\+xml);base64,(?P<payload>[A-Za-z0-9+/=\s]+)$"
)


def is_valid_role(role) -> bool:
    return isinstance(role, str) and 0 < len(role.strip()) and len(role) <= ROLE_MAX_LENGTH


def is_valid_image(image) -> bool:
    """True when the payload is a base64 data URL of a known image type."""
    if not isinstance(image, str):
        return False
    match = _IMAGE_DATA_URL.match(image)
    if not match:
        return False
    try:
        base64.b64decode("".join(match.group("payload").split()), validate=True)
    except (binascii.Error, ValueError):
        return False
    return True


class SignatureRepository:
    """Current signature per (contract, role). Never commits: the caller owns the transaction."""

    def __init__(self, db_session: Session):
        self.db = db_session

    def upsert(
        self,
        contract_id: int,
        role: str,
        party: SignerParty,
        image: str,
        name: Optional[str] = None,
        title: Optional[str] = None,
    ) -> Signature:
        if not is_valid_role(role):
            raise InvalidRole(role)
        if not is_valid_image(image):
            raise InvalidImage(role)

        sig = (
            self.db.query(Signature)
            .filter(Signature.contract_id == contract_id, Signature.role == role)
            .first()
        )
        if sig is None:
            sig = Signature(contract_id=contract_id, role=role)
            self.db.add(sig)

        sig.party = party
        sig.signature_image = image
        sig.signer_name = name
        sig.signer_title = title
        sig.signed_at = datetime.utcnow()
        self.db.flush()
        return sig

    def list_by_contract(self, contract_id: int) -> List[Signature]:
        return (
            self.db
            .query(Signature)
            .filter(Signature.contract_id == contract_id)
            .order_by(Signature.party, Signature.role, Signature.signed_at)
            .all()
        )

    @staticmethod
    def group_by_party_and_role(rows: List[Signature]) -> Dict[SignerParty, Dict[str, Signature]]:
        grouped: Dict[SignerParty, Dict[str, Signature]] = {}
        for row in rows:
            grouped.setdefault(row.party, {})[row.role] = row
        return grouped
