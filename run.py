import os
import sys
from datetime import datetime

import uvicorn
from dotenv import load_dotenv

# Load .env file
load_dotenv()

LOGS_DIR = os.getenv("LOGS_DIR", os.path.join(os.path.dirname(os.path.abspath(__file__)), "logs"))
HOST = os.getenv("HOST", "0.0.0.0")
PORT = int(os.getenv("PORT", 8002))


class TeeOutput:
    """Write to both console and file simultaneously"""

    def __init__(self, file_path, stream):
        self.file = open(file_path, "a", encoding="utf-8", buffering=1)  # line buffered
        self.stream = stream

    def write(self, data):
        self.stream.write(data)
        self.stream.flush()
        self.file.write(data)
        self.file.flush()

    def flush(self):
        self.stream.flush()
        self.file.flush()


def build_log_config(log_path: str) -> dict:
    """Uvicorn log config: every uvicorn logger goes to the console and the log file."""
    file_handler = {
        "class": "logging.FileHandler",
        "formatter": "file_format",
        "filename": log_path,
        "encoding": "utf-8",
    }
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "default": {
                "()": "uvicorn.logging.DefaultFormatter",
                "fmt": "%(asctime)s - %(levelprefix)s %(message)s",
                "datefmt": "%Y-%m-%d %H:%M:%S",
                "use_colors": False,
            },
            "access": {
                "()": "uvicorn.logging.AccessFormatter",
                "fmt": '%(asctime)s - %(levelprefix)s %(client_addr)s - "%(request_line)s" %(status_code)s',
                "datefmt": "%Y-%m-%d %H:%M:%S",
                "use_colors": False,
            },
            "file_format": {
                "format": "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
                "datefmt": "%Y-%m-%d %H:%M:%S",
            },
        },
        "handlers": {
            "default": {"class": "logging.StreamHandler", "formatter": "default", "stream": "ext://sys.stdout"},
            "access": {"class": "logging.StreamHandler", "formatter": "access", "stream": "ext://sys.stdout"},
            "file": file_handler,
            "access_file": dict(file_handler),
        },
        "loggers": {
            "uvicorn": {"handlers": ["default", "file"], "level": "INFO", "propagate": False},
            "uvicorn.error": {"handlers": ["default", "file"], "level": "INFO", "propagate": False},
            "uvicorn.access": {"handlers": ["access", "access_file"], "level": "INFO", "propagate": False},
            # Application loggers (services, scheduler jobs)
            "gymdesk": {"handlers": ["default", "file"], "level": "INFO", "propagate": False},
        },
    }


def main():
    os.makedirs(LOGS_DIR, exist_ok=True)

    # One log file per process start
    log_datetime = datetime.now().strftime("%Y-%m-%d_%H-%M-%S")
    log_path = os.path.join(LOGS_DIR, f"gymdesk_log_{log_datetime}.log")

    # Redirect stdout and stderr to log file (while keeping console output)
    sys.stdout = TeeOutput(log_path, sys.__stdout__)
    sys.stderr = TeeOutput(log_path, sys.__stderr__)

    print("=" * 60)
    print("GymDesk API Starting...")
    print(f"Log file: {log_path}")
    print("=" * 60)

    uvicorn.run(
        "main:app",
        host=HOST,
        port=PORT,
        workers=1,
        log_config=build_log_config(log_path),
        access_log=True,
    )


if __name__ == "__main__":
    main()
