"""
Pytest configuration for unit tests.
"""
import pytest
import sys
import os

# Ensure project root is in python path
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from config.configuration import AppConfig, BuilderConfig, ConfigLoader
from connstr.core.models import ConnectionRequest

@pytest.fixture(autouse=True)
def reset_config_loader():
    """Every test starts without a cached configuration."""
    ConfigLoader.reset()
    yield
    ConfigLoader.reset()

@pytest.fixture
def app_config():
    """Configuration with one integrated and one SQL-login profile."""
    return AppConfig(
        builder=BuilderConfig(
            profiles={
                "northwind": ConnectionRequest(server_instance="(local)", database="Northwind"),
                "reporting": ConnectionRequest(
                    server_instance="reporting-ag",
                    database="Sales",
                    username="report_user",
                    password="s3cret;pw",
                    application_intent="ReadOnly",
                ),
                "broken": ConnectionRequest(server_instance="srv", database="db", username="only_user"),
            }
        )
    )
