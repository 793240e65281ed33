"""UserTenant model - links identity-provider users to tenants with roles."""
import enum
from sqlalchemy import Column, BigInteger, String, Boolean, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from backoffice.database import Base, BigIntPK


class UserRole(enum.Enum):
    """User roles within a tenant."""
    OWNER = 'OWNER'
    ADMIN = 'ADMIN'
    STAFF = 'STAFF'


class UserTenant(Base):
    """
    Membership of a user in a tenant.

    user_id is the subject issued by the external identity provider,
    there is no local user table.
    """
    
    __tablename__ = 'user_tenant'
    __table_args__ = (UniqueConstraint('user_id', 'tenant_id', name='uq_user_tenant'),)
    
    id = Column(BigIntPK, primary_key=True, autoincrement=True)
    user_id = Column(String(64), nullable=False, index=True)
    tenant_id = Column(BigInteger, ForeignKey('tenant.id'), nullable=False)
    role = Column(String(20), nullable=False, default=UserRole.STAFF.value)
    active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    
    # Relationships
    tenant = relationship('Tenant', back_populates='user_tenants')
    
    def __repr__(self):
        return f"<UserTenant(user_id='{self.user_id}', tenant_id={self.tenant_id}, role='{self.role}')>"
    
    def is_admin(self):
        """Check if user is admin or owner."""
        return self.role in [UserRole.OWNER.value, UserRole.ADMIN.value]
