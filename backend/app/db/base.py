from backend.app.db.base_class import Base

# Import models to register metadata for Base.metadata.create_all in tests
from backend.app.models.user import User  # noqa: F401
from backend.app.models.user_preferences import UserPreferences  # noqa: F401
from backend.app.models.business import Business  # noqa: F401
from backend.app.models.client import Client  # noqa: F401
from backend.app.models.category import Category  # noqa: F401
from backend.app.models.product import Product  # noqa: F401
from backend.app.models.expense_category import ExpenseCategory  # noqa: F401
from backend.app.models.expense import Expense  # noqa: F401
from backend.app.models.invoice_template import InvoiceTemplate  # noqa: F401
from backend.app.models.invoice import Invoice  # noqa: F401
from backend.app.models.invoice_item import InvoiceItem  # noqa: F401
