import os
import logging
import queue
import secrets
from pathlib import Path
from flask import Flask, request, jsonify
from pydantic import ValidationError
from judge.config import SANDBOX_TOKEN
from judge.dispatcher import Dispatcher
from judge.exception import DuplicatedSubmissionIdError
from judge.language import supported_languages
from judge.meta import ExecutionRequest

Path("logs").mkdir(exist_ok=True)
logging.basicConfig(
    filename="logs/judge.log",
    level=logging.DEBUG,
)
app = Flask(__name__)
if __name__ != "__main__":
    # let flask app use gunicorn's logger
    gunicorn_logger = logging.getLogger("gunicorn.error")
    app.logger.handlers = gunicorn_logger.handlers
    app.logger.setLevel(gunicorn_logger.level)
    logging.getLogger().setLevel(gunicorn_logger.level)

    # Allow overriding log level via environment variable
    if os.getenv("JUDGE_DEBUG", "").lower() == "true":
        app.logger.setLevel(logging.DEBUG)
        logging.getLogger().setLevel(logging.DEBUG)
logger = app.logger

# setup dispatcher
DISPATCHER_CONFIG = os.getenv(
    "DISPATCHER_CONFIG",
    ".config/dispatcher.json.example",
)
DISPATCHER = Dispatcher(DISPATCHER_CONFIG)
DISPATCHER.start()


def _payload() -> dict:
    payload = request.get_json(silent=True)
    return payload if isinstance(payload, dict) else {}


def _check_token(payload: dict) -> bool:
    token = payload.get("token") or request.values.get("token", "")
    return secrets.compare_digest(str(token), SANDBOX_TOKEN)


def _queue_full():
    return (
        jsonify({
            "status": "err",
            "msg": "task queue is full now.\n"
            "please wait a moment and re-send the submission.",
            "data": None,
        }),
        500,
    )


@app.post("/execute")
def execute():
    payload = _payload()
    if not _check_token(payload):
        logger.debug("get invalid token")
        return "invalid token", 403
    try:
        future = DISPATCHER.execute(
            payload.get("code", ""),
            payload.get("language", ""),
            payload.get("testCases") or [],
            time_limit=payload.get("timeLimit", 2000),
            memory_limit=payload.get("memoryLimit", 256),
            compare_strategy=payload.get("compareStrategy", "token"),
            precision=payload.get("precision", 6),
        )
        result = future.result()
    except ValueError as e:
        return str(e), 400
    except queue.Full:
        return _queue_full()
    return jsonify(result.model_dump(mode="json"))


@app.post("/run")
def run_snippet():
    payload = _payload()
    if not _check_token(payload):
        logger.debug("get invalid token")
        return "invalid token", 403
    try:
        future = DISPATCHER.snippet(
            payload.get("code", ""),
            payload.get("language", ""),
            stdin=payload.get("stdin", ""),
            time_limit=payload.get("timeLimit", 5000),
        )
        result = future.result()
    except ValueError as e:
        return str(e), 400
    except queue.Full:
        return _queue_full()
    return jsonify(result.model_dump(mode="json"))


@app.post("/submit/<submission_id>")
def submit(submission_id: str):
    payload = _payload()
    if not _check_token(payload):
        logger.debug("get invalid token")
        return "invalid token", 403
    try:
        req = ExecutionRequest.model_validate(
            {k: v
             for k, v in payload.items() if k != "token"})
    except ValidationError as e:
        return str(e), 400

    logger.debug(f"send submission {submission_id} to dispatcher")
    try:
        DISPATCHER.handle(submission_id, req)
    except DuplicatedSubmissionIdError as e:
        return jsonify({"status": "err", "message": str(e)}), 409
    except queue.Full:
        return _queue_full()
    return jsonify({
        "status": "ok",
        "msg": "ok",
        "data": "ok",
    })


@app.get("/status")
def status():
    ret = {
        "load": DISPATCHER.load,
    }
    # if token is provided
    if secrets.compare_digest(SANDBOX_TOKEN, request.args.get("token", "")):
        ret.update({
            "pendingCount": DISPATCHER.pending_count,
            "maxTaskCount": DISPATCHER.MAX_TASK_COUNT,
            "runningCount": DISPATCHER.running_count,
            "maxConcurrency": DISPATCHER.MAX_CONCURRENCY,
            "submissions": [*DISPATCHER.result.keys()],
            "running": DISPATCHER.do_run,
            "languages": supported_languages(),
        })
    return jsonify(ret), 200


# for local debug
# if __name__ == "__main__":
#     app.run(host="0.0.0.0", port=5000, debug=True)
