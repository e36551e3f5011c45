"""Run the grading service: `python main.py` or `uvicorn main:app`.

Host/port/log level come from app.settings (HOST, PORT, LOG_LEVEL).
"""

from app.main import app
from app.settings import HOST, LOG_LEVEL, PORT


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host=HOST, port=PORT, log_level=LOG_LEVEL)
