"""
用户账户只读视图 - 用户资料由外部账户系统维护
"""

from typing import Optional
from pydantic import BaseModel, ConfigDict, field_validator


class UserAccount(BaseModel):

    model_config = ConfigDict(from_attributes=True)

    user_id: str
    name: str = ""
    email: str = ""
    profile_picture: str = ""
    role: str = "student"
    payout_account_id: Optional[str] = None  # Stripe Connect 账户

    @field_validator("name", "email", "profile_picture", mode="before")
    @classmethod
    def null_to_empty(cls, v):
        # 账户系统写入的用户行可能为NULL
        return v or ""

    @field_validator("role", mode="before")
    @classmethod
    def default_role(cls, v):
        return v or "student"

    @property
    def display_name(self) -> str:
        return self.name or self.email or "Un utilisateur"

    @property
    def is_moderator(self) -> bool:
        return self.role == "admin"
