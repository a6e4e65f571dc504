import os

import reflex as rx
from reflex.constants import LogLevel

config = rx.Config(
    app_name="budget_manager",
    loglevel=LogLevel.INFO,
    plugins=[
        rx.plugins.SitemapPlugin(),
        rx.plugins.TailwindV3Plugin(
            config={
                "theme": {
                    "extend": {
                        "colors": {
                            "status": {
                                "under": "#10b981",
                                "near": "#f59e0b",
                                "over": "#ef4444",
                            }
                        },
                        "fontFamily": {
                            "sans": ["Inter", "system-ui", "sans-serif"],
                        }
                    }
                }
            }
        ),
    ],
    frontend_port=int(os.getenv("FRONTEND_PORT", "3000")),
    backend_port=int(os.getenv("ENDPOINT_PORT", "8000")),
    backend_host=os.getenv("ENDPOINT_HOST", "0.0.0.0"),
    api_url=os.getenv("API_URL", "http://localhost:8000"),
)
