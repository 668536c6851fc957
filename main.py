# main.py
import logging

from fhr_simulator.config import get_settings
from fhr_simulator.api import create_app

settings = get_settings()

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

app = create_app(settings)


@app.get("/")
def read_root():
    return {"message": "FHR Strip Simulator API is running", "status": "ok"}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("main:app", host=settings.server.host, port=settings.server.port, reload=True)
