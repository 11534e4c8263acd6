import logging
import sqlite3
from typing import List, Optional

from .database import Database
from .errors import MemberNotFound
from .models import Member
from .validators import TextValidator

logger = logging.getLogger(__name__)


class MembershipRegistry:
    """Member records. Plain storage; members are never changed after registration."""

    def __init__(self, db: Database) -> None:
        self.db = db

    def add_member(self, name: str, member_number: str, phone: Optional[str] = None) -> int:
        name = TextValidator.require(name, "Name")
        member_number = TextValidator.require(member_number, "Member number")
        phone = TextValidator.optional(phone)

        with self.db.transaction() as conn:
            cursor = conn.execute(
                "INSERT INTO members (name, member_number, phone) VALUES (?, ?, ?)",
                (name, member_number, phone),
            )
            member_id = cursor.lastrowid
        logger.info("Registered member %s (%s)", member_id, member_number)
        return member_id

    def list_members(self) -> List[Member]:
        with self.db.reading() as conn:
            rows = conn.execute(
                "SELECT id, name, member_number, phone FROM members ORDER BY id"
            ).fetchall()
        return [Member.from_dict(row) for row in rows]

    def get_member(self, member_id: int) -> Member:
        with self.db.reading() as conn:
            row = conn.execute(
                "SELECT id, name, member_number, phone FROM members WHERE id = ?",
                (member_id,),
            ).fetchone()
        if row is None:
            raise MemberNotFound(member_id)
        return Member.from_dict(row)

    def exists(self, member_id: int, conn: Optional[sqlite3.Connection] = None) -> bool:
        with self.db.session(conn, write=False) as c:
            row = c.execute("SELECT 1 FROM members WHERE id = ?", (member_id,)).fetchone()
        return row is not None
