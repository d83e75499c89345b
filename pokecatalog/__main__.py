"""Run the viewer locally: ``python -m pokecatalog``."""

import os

import uvicorn


def main() -> None:
    uvicorn.run(
        "pokecatalog.main:app",
        host=os.environ.get("POKECATALOG_HOST", "127.0.0.1"),
        port=int(os.environ.get("POKECATALOG_PORT", "8000")),
    )


if __name__ == "__main__":
    main()
