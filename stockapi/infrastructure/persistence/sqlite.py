import sqlite3
import threading
from datetime import datetime, timezone
from decimal import Decimal
from pathlib import Path
from typing import List, Optional

from ...domain.errors import DuplicateEmailError
from ...domain.models import Product, ProductDraft, User
from ...domain.ports.persistence import PersistenceGateway

SQLITE_MAX_INTEGER = 2**63 - 1


def _storable_id(value: int) -> bool:
    return -SQLITE_MAX_INTEGER - 1 <= value <= SQLITE_MAX_INTEGER


class SQLitePersistence(PersistenceGateway):
    """SQLite-backed implementation of the persistence gateway."""

    def __init__(self, path: Path) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        self._conn = sqlite3.connect(path, check_same_thread=False)
        self._conn.row_factory = sqlite3.Row
        self._lock = threading.Lock()
        self._initialize()

    def _initialize(self) -> None:
        with self._lock, self._conn:
            self._conn.executescript(
                """
                CREATE TABLE IF NOT EXISTS users (
                    id TEXT PRIMARY KEY,
                    email TEXT NOT NULL UNIQUE COLLATE NOCASE,
                    password_hash TEXT NOT NULL,
                    created_at TEXT NOT NULL
                );

                CREATE TABLE IF NOT EXISTS products (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    name TEXT NOT NULL,
                    description TEXT NOT NULL DEFAULT '',
                    price TEXT NOT NULL,
                    stock INTEGER NOT NULL,
                    created_date TEXT NOT NULL,
                    last_updated_date TEXT
                );
                """
            )

    def close(self) -> None:
        self._conn.close()

    # UserRepository API ----------------------------------------------------
    def get_user_by_email(self, email: str) -> Optional[User]:
        with self._lock:
            cur = self._conn.execute("SELECT * FROM users WHERE email = ?", (email.lower(),))
            row = cur.fetchone()
        return self._row_to_user(row) if row else None

    def create_user(
        self,
        user_id: str,
        email: str,
        password_hash: str,
        created_at: datetime,
    ) -> User:
        normalized = email.lower()
        try:
            with self._lock, self._conn:
                self._conn.execute(
                    """
                    INSERT INTO users (id, email, password_hash, created_at)
                    VALUES (?, ?, ?, ?)
                    """,
                    (user_id, normalized, password_hash, self._format_datetime(created_at)),
                )
                cur = self._conn.execute("SELECT * FROM users WHERE id = ?", (user_id,))
                row = cur.fetchone()
        except sqlite3.IntegrityError as exc:
            raise DuplicateEmailError(normalized) from exc
        if not row:
            raise RuntimeError("Failed to persist user.")
        return self._row_to_user(row)

    # ProductRepository API -------------------------------------------------
    def list_products(self) -> List[Product]:
        with self._lock:
            cur = self._conn.execute("SELECT * FROM products ORDER BY id ASC")
            rows = cur.fetchall()
        return [self._row_to_product(row) for row in rows]

    def get_product(self, product_id: int) -> Optional[Product]:
        if not _storable_id(product_id):
            return None
        with self._lock:
            cur = self._conn.execute("SELECT * FROM products WHERE id = ?", (product_id,))
            row = cur.fetchone()
        return self._row_to_product(row) if row else None

    def create_product(self, draft: ProductDraft, created_date: datetime) -> Product:
        with self._lock, self._conn:
            cur = self._conn.execute(
                """
                INSERT INTO products (
                    name, description, price, stock, created_date, last_updated_date
                )
                VALUES (?, ?, ?, ?, ?, NULL)
                """,
                (
                    draft.name,
                    draft.description,
                    str(draft.price),
                    draft.stock,
                    self._format_datetime(created_date),
                ),
            )
            product_id = cur.lastrowid
            cur = self._conn.execute("SELECT * FROM products WHERE id = ?", (product_id,))
            row = cur.fetchone()
        if not row:
            raise RuntimeError("Failed to persist product.")
        return self._row_to_product(row)

    def replace_product(self, product: Product) -> bool:
        if not _storable_id(product.id):
            return False
        last_updated = (
            self._format_datetime(product.last_updated_date)
            if product.last_updated_date
            else None
        )
        with self._lock, self._conn:
            cur = self._conn.execute(
                """
                UPDATE products
                SET name = ?, description = ?, price = ?, stock = ?, last_updated_date = ?
                WHERE id = ?
                """,
                (
                    product.name,
                    product.description,
                    str(product.price),
                    product.stock,
                    last_updated,
                    product.id,
                ),
            )
            return cur.rowcount > 0

    def delete_product(self, product_id: int) -> bool:
        if not _storable_id(product_id):
            return False
        with self._lock, self._conn:
            cur = self._conn.execute("DELETE FROM products WHERE id = ?", (product_id,))
            return cur.rowcount > 0

    # Helpers ----------------------------------------------------------------
    @staticmethod
    def _format_datetime(value: datetime) -> str:
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc).isoformat()

    @staticmethod
    def _parse_datetime(value: str) -> datetime:
        result = datetime.fromisoformat(value)
        if result.tzinfo is None:
            return result.replace(tzinfo=timezone.utc)
        return result.astimezone(timezone.utc)

    def _row_to_user(self, row: sqlite3.Row) -> User:
        return User(
            id=row["id"],
            email=row["email"],
            password_hash=row["password_hash"],
            created_at=self._parse_datetime(row["created_at"]),
        )

    def _row_to_product(self, row: sqlite3.Row) -> Product:
        return Product(
            id=row["id"],
            name=row["name"],
            description=row["description"],
            price=Decimal(row["price"]),
            stock=row["stock"],
            created_date=self._parse_datetime(row["created_date"]),
            last_updated_date=self._parse_datetime(row["last_updated_date"])
            if row["last_updated_date"]
            else None,
        )
