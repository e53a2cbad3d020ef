import os

import uvicorn


def main() -> None:
    """Run the catalog API for local development."""
    uvicorn.run(
        "api.main:app",
        host=os.getenv("MEDIA_CATALOG_HOST", "127.0.0.1"),
        port=int(os.getenv("MEDIA_CATALOG_PORT", "8000")),
        reload=os.getenv("MEDIA_CATALOG_RELOAD", "0") == "1",
    )


if __name__ == "__main__":
    main()
