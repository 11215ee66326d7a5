"""Start the Bank Account API with uvicorn.

Host and port are read from `BANK_HOST` and `BANK_PORT`
(defaults `0.0.0.0` and `8000`).

Usage:
    python run.py
"""
import os

import uvicorn


def main() -> None:
    host = os.getenv("BANK_HOST", "0.0.0.0")
    port = int(os.getenv("BANK_PORT", "8000"))
    uvicorn.run("bank_api.app:app", host=host, port=port, reload=False, log_level="info")


if __name__ == "__main__":
    main()
