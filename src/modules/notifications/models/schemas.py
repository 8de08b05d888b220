from pydantic import BaseModel
from datetime import datetime

from modules.notifications.models.email_log import EmailKind

class EmailLogResponse(BaseModel):
    id: int
    email: str
    kind: EmailKind
    subject: str
    sent_at: datetime

    model_config = {"from_attributes": True}
