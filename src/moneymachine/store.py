"""
Local key-value store for signals, news and settings.

Each table is one JSON array kept under a key in a single SQLite table, newest
record first, capped so the file never grows past a few hundred records.
"""

import os
import json
import sqlite3
import logging
from typing import Any, Dict, List, Optional

from moneymachine.models import NewsItem, Signal
from moneymachine.strategy_config import CAPS

logger = logging.getLogger("MoneyMachine.Store")

DB_KEYS = {
    "SIGNALS": "aimm_signals_table",
    "NEWS": "aimm_news_table",
    "SETTINGS": "aimm_settings_table",
}


class LocalStore:
    def __init__(self, db_path: str = "data/aimm.db", max_records: int = CAPS["STORE_TABLE"]):
        self.db_path = db_path
        self.max_records = max_records
        directory = os.path.dirname(db_path)
        if directory and not os.path.exists(directory):
            os.makedirs(directory)
        conn = sqlite3.connect(self.db_path)
        conn.execute("CREATE TABLE IF NOT EXISTS kv_store (key TEXT PRIMARY KEY, value TEXT)")
        conn.commit()
        conn.close()

    # --- raw key-value access ---

    def get_item(self, key: str) -> Optional[str]:
        conn = sqlite3.connect(self.db_path)
        row = conn.execute("SELECT value FROM kv_store WHERE key = ?", (key,)).fetchone()
        conn.close()
        return row[0] if row else None

    def set_item(self, key: str, value: str):
        conn = sqlite3.connect(self.db_path)
        conn.execute(
            "INSERT INTO kv_store (key, value) VALUES (?, ?) "
            "ON CONFLICT(key) DO UPDATE SET value = excluded.value",
            (key, value),
        )
        conn.commit()
        conn.close()

    def remove_item(self, key: str):
        conn = sqlite3.connect(self.db_path)
        conn.execute("DELETE FROM kv_store WHERE key = ?", (key,))
        conn.commit()
        conn.close()

    def _load_table(self, key: str, default="[]") -> Any:
        raw = self.get_item(key) or default
        empty = json.loads(default)
        try:
            data = json.loads(raw)
        except json.JSONDecodeError:
            data = None
        if not isinstance(data, type(empty)):
            logger.warning(f"Corrupt table {key}, treating as empty")
            return empty
        return data

    def _prepend(self, key: str, record: Dict[str, Any]):
        data = self._load_table(key)
        data.insert(0, record)
        del data[self.max_records:]
        self.set_item(key, json.dumps(data))

    # --- tables ---

    def init(self):
        if self.get_item(DB_KEYS["SIGNALS"]) is None:
            self.set_item(DB_KEYS["SIGNALS"], json.dumps([]))
        if self.get_item(DB_KEYS["NEWS"]) is None:
            self.set_item(DB_KEYS["NEWS"], json.dumps([]))
        logger.info("Database initialized.")

    def insert_signal(self, signal: Signal):
        self._prepend(DB_KEYS["SIGNALS"], signal.to_dict())

    def insert_news(self, news: NewsItem):
        self._prepend(DB_KEYS["NEWS"], news.to_dict())

    def get_signals(self) -> List[Signal]:
        signals = []
        for record in self._load_table(DB_KEYS["SIGNALS"]):
            try:
                signals.append(Signal.from_dict(record))
            except (KeyError, ValueError, TypeError) as e:
                logger.warning(f"Skipping unreadable signal record: {e}")
        return signals

    def get_news(self) -> List[NewsItem]:
        news = []
        for record in self._load_table(DB_KEYS["NEWS"]):
            try:
                news.append(NewsItem.from_dict(record))
            except (KeyError, ValueError, TypeError) as e:
                logger.warning(f"Skipping unreadable news record: {e}")
        return news

    def get_setting(self, name: str, default: Any = None) -> Any:
        return self._load_table(DB_KEYS["SETTINGS"], default="{}").get(name, default)

    def set_setting(self, name: str, value: Any):
        settings = self._load_table(DB_KEYS["SETTINGS"], default="{}")
        settings[name] = value
        self.set_item(DB_KEYS["SETTINGS"], json.dumps(settings))

    def clear_db(self):
        self.remove_item(DB_KEYS["SIGNALS"])
        self.remove_item(DB_KEYS["NEWS"])
        logger.info("Database cleared.")
