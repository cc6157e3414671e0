"""
JSON document store

Layout under <root>/<prefix>/:
    quizzes/<quizId>.json
    submissions/<quizId>/<teamName>/<roundNumber>.json

Path segments are URL-quoted; all-dot segments are escaped too. Writes go through a temp file + os.replace so a
document is always either the old or the new version (last write wins).
"""
import hashlib
import json
import logging
import os
import random
import string
import tempfile
import threading
import time
from pathlib import Path
from typing import Any, Dict, List, Optional
from urllib.parse import quote


logger = logging.getLogger(__name__)

DEFAULT_PREFIX = "quizgo-db"

_BASE36 = string.digits + string.ascii_lowercase


def _base36(number: int) -> str:
    if number == 0:
        return "0"
    digits = []
    while number:
        number, rem = divmod(number, 36)
        digits.append(_BASE36[rem])
    return "".join(reversed(digits))


def make_quiz_id() -> str:
    """quiz_<base36 millis>_<8 random base36 chars>"""
    suffix = "".join(random.choices(_BASE36, k=8))
    return f"quiz_{_base36(int(time.time() * 1000))}_{suffix}"


def stable_submission_id(quiz_id: str, team_name: str, round_number: int) -> str:
    digest = hashlib.sha256(f"{quiz_id}\n{team_name}\n{round_number}".encode("utf-8")).hexdigest()
    return f"sub_{digest[:16]}"


def _segment(value: str) -> str:
    quoted = quote(value.strip(), safe="")
    # "." and ".." would resolve to the parent directory
    if quoted and not quoted.strip("."):
        quoted = quoted.replace(".", "%2E")
    return quoted


class JsonBlobStore:
    """Filesystem key-value store of JSON documents addressed by pathname"""

    def __init__(self, root: str, prefix: str = DEFAULT_PREFIX):
        self.root = Path(root)
        self.prefix = prefix.strip().strip("/") or DEFAULT_PREFIX
        self._lock = threading.Lock()

    # ---------- pathnames ----------

    @property
    def quizzes_prefix(self) -> str:
        return f"{self.prefix}/quizzes/"

    @property
    def submissions_prefix(self) -> str:
        return f"{self.prefix}/submissions/"

    def quiz_pathname(self, quiz_id: str) -> str:
        return f"{self.quizzes_prefix}{_segment(quiz_id)}.json"

    def submission_prefix(self, quiz_id: Optional[str] = None, team_name: Optional[str] = None) -> str:
        prefix = self.submissions_prefix
        if quiz_id:
            prefix += f"{_segment(quiz_id)}/"
            if team_name:
                prefix += f"{_segment(team_name)}/"
        return prefix

    def submission_pathname(self, quiz_id: str, team_name: str, round_number: int) -> str:
        return f"{self.submission_prefix(quiz_id, team_name)}{round_number}.json"

    def _path(self, pathname: str) -> Path:
        return self.root / pathname

    # ---------- operations ----------

    def get(self, pathname: str) -> Optional[Dict[str, Any]]:
        """Read one document; None if it does not exist"""
        path = self._path(pathname)
        try:
            with open(path, "r", encoding="utf-8") as f:
                return json.load(f)
        except FileNotFoundError:
            return None

    def put(self, pathname: str, document: Dict[str, Any]) -> None:
        """Write (create or overwrite) one document atomically"""
        path = self._path(pathname)
        with self._lock:
            path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(dir=path.parent, suffix=".tmp")
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    json.dump(document, f, ensure_ascii=False)
                os.replace(tmp_path, path)
            except BaseException:
                if os.path.exists(tmp_path):
                    os.unlink(tmp_path)
                raise
        logger.debug(f"Stored {pathname}")

    def delete(self, pathname: str) -> bool:
        with self._lock:
            try:
                self._path(pathname).unlink()
            except FileNotFoundError:
                return False
        return True

    def list(self, prefix: str) -> List[str]:
        """Pathnames of all documents under a prefix, sorted"""
        base = self._path(prefix)
        if not base.is_dir():
            return []
        return sorted(
            path.relative_to(self.root).as_posix()
            for path in base.rglob("*.json")
            if path.is_file()
        )

    def load_all(self, prefix: str) -> List[Dict[str, Any]]:
        documents = []
        for pathname in self.list(prefix):
            document = self.get(pathname)
            if document is not None:
                documents.append(document)
        return documents
