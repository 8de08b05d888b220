from typing import List
from sqlalchemy.orm import Session

from modules.notifications.models.email_log import EmailLog

class EmailLogRepository:
    def __init__(self, db_session: Session):
        self.db = db_session

    def save_all(self, logs: List[EmailLog]) -> List[EmailLog]:
        self.db.add_all(logs)
        self.db.commit()
        return logs

    def find_by_contract_id(self, contract_id: int) -> List[EmailLog]:
        return (
            self.db
            .query(EmailLog)
            .filter(EmailLog.contract_id == contract_id)
            .order_by(EmailLog.sent_at.desc(), EmailLog.id.desc())
            .all()
        )
