"""
Referral Manager

Email-verification-gated referral codes backed by SQLite.

Flow: a visitor submits an email and receives a short-lived verification
token by mail. Following the link verifies the address and issues a
referral code. Visits to /r/<code> are counted and forwarded to the
survey form with the code attached.
"""
import logging
import secrets
import sqlite3
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional
from urllib.parse import urlencode, urlsplit, urlunsplit, parse_qsl

from config import TOKEN_TTL_MINUTES, TOKEN_BYTES, REFERRAL_CODE_BYTES


class ReferralError(Exception):
    """Base class for referral flow errors"""


class MissingEmailError(ReferralError):
    pass


class InvalidEmailError(ReferralError):
    pass


class MissingTokenError(ReferralError):
    pass


class InvalidTokenError(ReferralError):
    pass


class ExpiredTokenError(ReferralError):
    pass


class UnknownReferralError(ReferralError):
    pass


@dataclass
class ReferralUser:
    email: str
    code: str
    verified: bool
    clicked_count: int
    submitted_count: int
    created_at: Optional[str] = None

    @classmethod
    def from_row(cls, row: sqlite3.Row) -> 'ReferralUser':
        return cls(
            email=row["email"],
            code=row["code"],
            verified=bool(row["verified"]),
            clicked_count=row["clicked_count"] or 0,
            submitted_count=row["submitted_count"] or 0,
            created_at=row["created_at"],
        )


SCHEMA = """
CREATE TABLE IF NOT EXISTS users (
  email TEXT PRIMARY KEY,
  code TEXT,
  verified INTEGER DEFAULT 0,
  created_at TEXT DEFAULT (datetime('now')),
  clicked_count INTEGER DEFAULT 0,
  submitted_count INTEGER DEFAULT 0
);
CREATE TABLE IF NOT EXISTS tokens (
  email TEXT,
  token TEXT,
  expires_at TEXT
);
"""


def normalise_email(email: Optional[str]) -> str:
    if email is None:
        return ""
    return email.strip().lower()


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def parse_timestamp(value: str) -> datetime:
    """
    Parse a stored expiry timestamp as an aware UTC datetime.

    Accepts the "...Z" form written by the earlier Node server, which
    datetime.fromisoformat() only understands from Python 3.11.
    """
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


class ReferralManager:
    """Manages verification tokens, referral codes and click counts"""

    def __init__(self, db_path: str, base_url: str = "", form_url: str = "",
                 token_ttl_minutes: int = TOKEN_TTL_MINUTES,
                 clock: Optional[Callable[[], datetime]] = None):
        """
        Initialize Referral Manager

        Args:
            db_path: SQLite database file (":memory:" for tests)
            base_url: Public site URL for generated links
            form_url: Survey form that referral visits are forwarded to
            token_ttl_minutes: Verification token lifetime
            clock: Returns the current aware datetime (injectable for tests)
        """
        self.db_path = db_path
        self.base_url = base_url.rstrip("/")
        self.form_url = form_url
        self.token_ttl = timedelta(minutes=token_ttl_minutes)
        self.clock = clock or _utcnow
        self.conn: Optional[sqlite3.Connection] = None

    def initialize(self) -> None:
        """Open the database and apply the schema"""
        self.conn = sqlite3.connect(self.db_path, check_same_thread=False)
        self.conn.row_factory = sqlite3.Row
        self.conn.executescript(SCHEMA)

        # Older databases predate the counters
        self._ensure_column("users", "clicked_count", "INTEGER DEFAULT 0")
        self._ensure_column("users", "submitted_count", "INTEGER DEFAULT 0")
        self.conn.commit()
        logging.info(f"Referral database ready at {self.db_path}")

    def close(self) -> None:
        if self.conn:
            self.conn.close()
            self.conn = None

    def _ensure_column(self, table: str, column: str, definition: str) -> None:
        columns = self.conn.execute(f"PRAGMA table_info({table})").fetchall()
        if not any(col["name"] == column for col in columns):
            logging.info(f"Adding missing column {table}.{column}")
            self.conn.execute(f"ALTER TABLE {table} ADD COLUMN {column} {definition}")

    def _db(self) -> sqlite3.Connection:
        if self.conn is None:
            raise RuntimeError("Referral database not initialized")
        return self.conn

    # ------------------------------------------------------------------
    # Links
    # ------------------------------------------------------------------

    def _site_url(self, fallback_base: str = "") -> str:
        return self.base_url or fallback_base.rstrip("/")

    def verification_link(self, token: str, fallback_base: str = "") -> str:
        return f"{self._site_url(fallback_base)}/verify?{urlencode({'token': token})}"

    def referral_link(self, code: str, fallback_base: str = "") -> str:
        return f"{self._site_url(fallback_base)}/r/{code}"

    def form_redirect_url(self, code: str) -> str:
        """
        Survey form URL carrying the referral code.

        Falls back to "/" without a form URL, and to the raw form URL when
        it can't be parsed.
        """
        if not self.form_url:
            return "/"
        try:
            parts = urlsplit(self.form_url)
            if not parts.scheme or not parts.netloc:
                raise ValueError(f"not an absolute URL: {self.form_url}")
            query = [(k, v) for k, v in parse_qsl(parts.query, keep_blank_values=True) if k != "referral"]
            query.append(("referral", code))
            return urlunsplit(parts._replace(query=urlencode(query)))
        except ValueError as e:
            logging.error(f"Invalid FORM_URL provided: {e}")
            return self.form_url

    # ------------------------------------------------------------------
    # Tokens
    # ------------------------------------------------------------------

    def issue_token(self, email: Optional[str]) -> str:
        """
        Replace any outstanding token for this email with a fresh one.

        Raises:
            MissingEmailError: If email is empty
            InvalidEmailError: If email spans more than one line
        """
        email = normalise_email(email)
        if not email:
            raise MissingEmailError("Email required")
        if "\r" in email or "\n" in email:
            raise InvalidEmailError("Invalid email")

        token = secrets.token_hex(TOKEN_BYTES)
        expires = (self.clock() + self.token_ttl).isoformat()

        db = self._db()
        with db:
            db.execute("DELETE FROM tokens WHERE email = ?", (email,))
            db.execute(
                "INSERT INTO tokens (email, token, expires_at) VALUES (?, ?, ?)",
                (email, token, expires),
            )
        logging.info(f"Issued verification token for {email}")
        return token

    def verify_token(self, token: Optional[str]) -> ReferralUser:
        """
        Verify the email behind a token and return its referral record.

        New addresses get a referral code; known ones are marked verified.
        The token stays valid until it expires or is replaced.

        Raises:
            MissingTokenError, InvalidTokenError, ExpiredTokenError
        """
        if not token:
            raise MissingTokenError("Missing token")

        db = self._db()
        row = db.execute(
            "SELECT email, expires_at FROM tokens WHERE token = ?", (token,)
        ).fetchone()
        if row is None:
            raise InvalidTokenError("Invalid token")
        if parse_timestamp(row["expires_at"]) < self.clock():
            raise ExpiredTokenError("Token expired!")

        email = row["email"]
        with db:
            existing = self.get_user(email)
            if existing is None:
                code = self._new_code()
                db.execute(
                    "INSERT INTO users (email, code, verified) VALUES (?, ?, 1)",
                    (email, code),
                )
                logging.info(f"Verified {email}, issued referral code {code}")
            else:
                db.execute("UPDATE users SET verified = 1 WHERE email = ?", (email,))

        user = self.get_user(email)
        if user is None:
            raise RuntimeError(f"Unable to load referral data for {email}")
        return user

    def _new_code(self) -> str:
        db = self._db()
        while True:
            code = secrets.token_hex(REFERRAL_CODE_BYTES).upper()
            clash = db.execute("SELECT 1 FROM users WHERE code = ?", (code,)).fetchone()
            if clash is None:
                return code

    def purge_expired_tokens(self) -> int:
        """Delete expired tokens, returning how many were removed"""
        db = self._db()
        now = self.clock()
        expired = [
            (row["token"],)
            for row in db.execute("SELECT token, expires_at FROM tokens").fetchall()
            if parse_timestamp(row["expires_at"]) < now
        ]
        if expired:
            with db:
                db.executemany("DELETE FROM tokens WHERE token = ?", expired)
        return len(expired)

    # ------------------------------------------------------------------
    # Users and clicks
    # ------------------------------------------------------------------

    def get_user(self, email: str) -> Optional[ReferralUser]:
        row = self._db().execute(
            "SELECT * FROM users WHERE email = ?", (normalise_email(email),)
        ).fetchone()
        return ReferralUser.from_row(row) if row else None

    def get_user_by_code(self, code: str) -> Optional[ReferralUser]:
        """Verified user owning a referral code"""
        row = self._db().execute(
            "SELECT * FROM users WHERE code = ? AND verified = 1", (code,)
        ).fetchone()
        return ReferralUser.from_row(row) if row else None

    def record_click(self, code: str) -> int:
        """
        Count a visit to a referral link.

        Returns:
            The updated click count

        Raises:
            UnknownReferralError: If no verified user owns the code
        """
        if self.get_user_by_code(code) is None:
            raise UnknownReferralError("Unknown referral code")

        db = self._db()
        with db:
            db.execute(
                "UPDATE users SET clicked_count = COALESCE(clicked_count, 0) + 1 WHERE code = ?",
                (code,),
            )
        return self.get_user_by_code(code).clicked_count
