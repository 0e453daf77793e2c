"""Run the API server: ``python -m multitool_agent``."""

from .api.main import run_server

if __name__ == "__main__":
    run_server()
