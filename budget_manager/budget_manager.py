import reflex as rx

from budget_manager import application
from budget_manager.api import create_api
from budget_manager.config import get_settings, load_env
from budget_manager.utils.logger import get_logger, install_excepthook, setup_logging

# Setup logging first
setup_logging()
logger = get_logger(__name__)
install_excepthook(logger)

# Load environment variables from .env file
load_env()
settings = get_settings()
logger.info(f"Settings: {settings.describe()}")

from .pages import budgets_page, home_page, transactions_page  # noqa: E402
from .states import BudgetState, DashboardState, TransactionState  # noqa: E402

app = rx.App(
    theme=rx.theme(
        appearance="light",
        accent_color="indigo",
        gray_color="slate",
        radius="medium",
        scaling="100%",
    ),
    stylesheets=[
        "https://fonts.googleapis.com/css2?family=Inter:wght@400;500;600;700&display=swap",
    ],
    style={
        rx.el.body: {
            "font_family": "Inter, sans-serif",
        }
    },
    api_transformer=create_api(),
)

# Supervision tree (Telemetry, Repo, PubSub, HttpClient, Endpoint) follows the backend lifespan
app.register_lifespan_task(application.lifespan)

app.add_page(home_page, route="/", title="Overview", on_load=DashboardState.load)
app.add_page(transactions_page, route="/transactions", title="Transactions", on_load=TransactionState.load)
app.add_page(budgets_page, route="/budgets", title="Budgets", on_load=BudgetState.load)
