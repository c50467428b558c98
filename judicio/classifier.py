# classifier.py - bridge to the external clause classification process
import json
import shlex
import logging
import subprocess

logger = logging.getLogger(__name__)


class ClauseClassifier:
    """
    Runs an external classifier command with the document text on stdin.

    The command must print JSON on stdout: either a list of clause objects or an
    object with a "clauses" list. Anything else, including a failed or timed-out
    process, yields an empty list.
    """

    def __init__(self, command=None, timeout=60.0):
        if isinstance(command, str):
            command = shlex.split(command)
        self.command = list(command or [])
        self.timeout = timeout

    @property
    def enabled(self):
        return bool(self.command)

    def classify(self, text):
        if not self.enabled:
            return []
        try:
            out = subprocess.run(
                self.command,
                input=text,
                capture_output=True,
                text=True,
                check=True,
                timeout=self.timeout,
            )
        except subprocess.TimeoutExpired:
            logger.warning("Clause classifier timed out after %ss", self.timeout)
            return []
        except subprocess.CalledProcessError as e:
            logger.warning("Clause classifier exited with %s: %s", e.returncode, (e.stderr or "").strip()[:500])
            return []
        except OSError:
            logger.exception("Clause classifier could not be started: %s", self.command[0])
            return []

        try:
            payload = json.loads(out.stdout)
        except ValueError:
            logger.warning("Clause classifier printed malformed JSON: %r", out.stdout[:200])
            return []

        if isinstance(payload, dict):
            payload = payload.get("clauses")
        if not isinstance(payload, list):
            logger.warning("Clause classifier output has no clause list")
            return []
        return [clause for clause in payload if isinstance(clause, dict)]
