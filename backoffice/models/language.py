"""Language model."""
from sqlalchemy import Column, String, Boolean
from backoffice.database import Base


class Language(Base):
    """
    Content language. Exactly one row is expected to carry is_default;
    the settings service keeps it that way when the default changes.
    """

    __tablename__ = 'language'

    code = Column(String(8), primary_key=True)
    name = Column(String(80), nullable=False)
    native_name = Column(String(80), nullable=False)
    is_default = Column(Boolean, nullable=False, default=False)
    is_rtl = Column(Boolean, nullable=False, default=False)
    is_active = Column(Boolean, nullable=False, default=True)

    def __repr__(self):
        return f"<Language(code='{self.code}', is_default={self.is_default})>"

    def to_dict(self):
        return {
            'code': self.code,
            'name': self.name,
            'native_name': self.native_name,
            'is_default': self.is_default,
            'is_rtl': self.is_rtl,
            'is_active': self.is_active,
        }
