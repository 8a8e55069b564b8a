from sqlalchemy import Column, Integer, String, Text

from license_portal.models.base import BaseModel


class AdminAction(BaseModel):
    """
    Audit record of a review decision taken by an administrator.
    """
    __tablename__ = "admin_actions"

    admin_id = Column(Integer, nullable=True)
    action_type = Column(String(20), nullable=False)
    application_id = Column(String(64), index=True, nullable=False)
    notes = Column(Text, nullable=True)

    def __repr__(self):
        return f"<AdminAction {self.action_type} on {self.application_id}>"
