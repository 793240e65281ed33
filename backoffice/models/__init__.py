"""Models package - exports all SQLAlchemy models."""
# Tenancy
from backoffice.models.tenant import Tenant
from backoffice.models.user_tenant import UserTenant, UserRole

# Catalog
from backoffice.models.category import Category, CategoryType
from backoffice.models.product import Product, ProductVariant
from backoffice.models.product_media import ProductMedia

# Sales
from backoffice.models.order import Order, OrderLine, OrderStatus, OrderType

# Localization
from backoffice.models.language import Language
from backoffice.models.translation import ProductTranslation, CategoryTranslation, VariantTranslation

__all__ = [
    'Tenant', 'UserTenant', 'UserRole',
    'Category', 'CategoryType', 'Product', 'ProductVariant', 'ProductMedia',
    'Order', 'OrderLine', 'OrderStatus', 'OrderType',
    'Language', 'ProductTranslation', 'CategoryTranslation', 'VariantTranslation',
]
