# run.py

import uvicorn
import os

port = int(os.environ.get("PORT", 8000))
host = os.environ.get("HOST", "0.0.0.0")

if __name__ == "__main__":
    uvicorn.run(
        "app.main:app",
        host=host,
        port=port,
        reload=os.environ.get("RELOAD", "false").lower() == "true",
        log_level=os.environ.get("LOG_LEVEL", "info")
    )
