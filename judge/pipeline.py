import requests as rq

from .utils import (
    logger, )
from .config import (
    BACKEND_API,
    SANDBOX_TOKEN,
)
from .meta import SubmissionResult


def report_result(submission_id: str, result: SubmissionResult) -> bool:
    """
    Send a finished submission back to the backend server.
    The judge keeps nothing, so a failed report is only logged.
    """
    logger().info(f"send to BE [submission_id={submission_id}]")
    try:
        resp = rq.put(
            f"{BACKEND_API}/submission/{submission_id}/complete",
            json={
                "result": result.model_dump(mode="json"),
                "token": SANDBOX_TOKEN,
            },
            timeout=10,
        )
    except rq.RequestException as e:
        logger().error(
            f"Error during report result [submission_id: {submission_id}]: {e}"
        )
        return False
    logger().debug(f"get BE response: [{resp.status_code}] {resp.text}", )
    if not resp.ok:
        logger().error(
            f"BE rejected result [submission_id: {submission_id}, resp: {resp.text}]"
        )
        return False
    return True
