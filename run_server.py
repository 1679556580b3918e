import uvicorn

from face_reading.core.config import DEBUG, SERVER_HOST, SERVER_PORT

if __name__ == "__main__":
    print(f"Starting Face Reading Orchestrator on {SERVER_HOST}:{SERVER_PORT}...")
    uvicorn.run("face_reading.main:app", host=SERVER_HOST, port=SERVER_PORT, reload=DEBUG)
