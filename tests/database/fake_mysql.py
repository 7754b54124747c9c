"""In-memory stand-ins for a mysql-connector connection factory.

Every statement is recorded on its connection. Replies come from
``FakeConnectionFactory.script`` when a scripted fragment matches,
otherwise from the defaults below.
"""

from __future__ import annotations

from mysql.connector import errorcode
from mysql.connector.errors import IntegrityError


def _default_reply(statement):
    if "dup" in statement:
        return {"error": IntegrityError(msg="Duplicate entry 'PAY-1'", errno=errorcode.ER_DUP_ENTRY)}
    if statement.upper().startswith("SELECT"):
        return {"rows": [{"n": 1}]}
    return {"rowcount": 1, "lastrowid": 42}


class FakeCursor:
    def __init__(self, conn):
        self._conn = conn
        self.with_rows = False
        self.rowcount = 0
        self.lastrowid = None
        self._rows = []

    def execute(self, statement, params=()):
        text = statement.strip()
        self._conn.statements.append((text, params))
        reply = self._conn.reply_for(text)
        if "error" in reply:
            raise reply["error"]

        self.with_rows = "rows" in reply
        self._rows = list(reply.get("rows", []))
        self.rowcount = reply.get("rowcount", len(self._rows) if self.with_rows else 1)
        self.lastrowid = reply.get("lastrowid")

    def fetchall(self):
        return self._rows

    def close(self):
        pass


class FakeConnection:
    def __init__(self, script):
        self._script = script
        self.statements = []
        self.committed = False
        self.rolled_back = False
        self.closed = False

    def reply_for(self, statement):
        for i, (fragment, reply) in enumerate(self._script):
            if fragment in statement:
                del self._script[i]
                return reply
        return _default_reply(statement)

    def cursor(self, dictionary=False):
        return FakeCursor(self)

    def commit(self):
        self.committed = True

    def rollback(self):
        self.rolled_back = True

    def close(self):
        self.closed = True


class FakeConnectionFactory:
    def __init__(self):
        self.connections = []
        self._script = []

    def script(self, fragment, **reply):
        """Queue one reply for the next statement containing ``fragment``.

        ``reply`` takes ``rows``, ``rowcount``, ``lastrowid`` or ``error``.
        """

        self._script.append((fragment, reply))
        return self

    def connect(self, *, with_database=True):
        conn = FakeConnection(self._script)
        self.connections.append(conn)
        return conn
