"""
Audit logging model.

``AuditLog`` records lifecycle changes made through the service layer,
including the ones the promotion scheduler makes with no user attached.
"""

from hrcore.extensions import db


class AuditLog(db.Model):
    """
    Records data changes in the application.

    Change details are stored as JSON blobs for flexibility.

    ``action_type`` values: CREATE, UPDATE, DELETE, APPLY, REVERT, CANCEL.

    JSON conventions for ``previous_value`` / ``new_value``:
      - CREATE: previous_value is NULL, new_value has full record.
      - UPDATE: both contain only the changed fields.
      - DELETE: previous_value has full record, new_value is NULL.
    """

    __tablename__ = "audit_log"

    id = db.Column(db.BigInteger().with_variant(db.Integer, "sqlite"), primary_key=True)
    company_id = db.Column(db.Integer, nullable=True, index=True)
    user_id = db.Column(db.String(100), nullable=True)
    action_type = db.Column(db.String(50), nullable=False)
    entity_type = db.Column(db.String(100), nullable=False)
    entity_id = db.Column(db.Integer, nullable=True)
    previous_value = db.Column(db.Text, nullable=True)
    new_value = db.Column(db.Text, nullable=True)
    created_at = db.Column(db.DateTime, nullable=False, server_default=db.func.now())

    def __repr__(self) -> str:
        return (
            f"<AuditLog {self.action_type} {self.entity_type}"
            f":{self.entity_id}>"
        )
