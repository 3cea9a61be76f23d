from models.base_model import Base, BaseModel
from sqlalchemy import Column, String, Text


class User(BaseModel, Base):
    __tablename__ = "users"
    # stored case-folded; uniqueness is checked by the auth service and backed by the index
    username = Column(String(64), nullable=False, unique=True, index=True)
    email = Column(String(255), nullable=False, unique=True, index=True)
    full_name = Column(String(255), nullable=False, index=True)
    password_hash = Column(String(255), nullable=False)

    # Opaque references into the external asset host
    avatar_url = Column(String(1024), nullable=True)
    avatar_public_id = Column(String(255), nullable=True)
    cover_image_url = Column(String(1024), nullable=True)
    cover_image_public_id = Column(String(255), nullable=True)

    # The one refresh token currently honoured for this user; None once logged out
    refresh_token = Column(Text, nullable=True)

    @property
    def password(self):
        raise AttributeError("Password: Write-only field")
