#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Sahaayak Core v1.0 - Keyed Record Store
Per-user and global record collections with atomic JSON persistence and backups

Version: 1.0.0
Date: 2026-10-19
"""

import copy
import json
import time
import shutil
import gzip
import threading
import uuid
from abc import ABC
from datetime import datetime
from pathlib import Path
from typing import Callable, Dict, List, Optional, Tuple, Any
from dataclasses import dataclass
import logging

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger

logger = logging.getLogger(__name__)

STORE_VERSION = "1.0.0"

Record = Dict[str, Any]

# ===== EXCEPTIONS =====

class DatabaseError(Exception):
    """Base error for the record store"""
    pass

class DatabaseConnectionError(DatabaseError):
    """Store could not be opened"""
    pass

class DatabaseCorruptionError(DatabaseError):
    """Stored data is unreadable"""
    pass

# ===== HELPER CLASSES =====

@dataclass
class DatabaseStats:
    """Record store statistics"""
    total_users: int = 0
    total_records: int = 0
    database_size_mb: float = 0.0
    last_backup: Optional[str] = None
    last_save: Optional[str] = None
    save_count: int = 0
    load_count: int = 0
    error_count: int = 0
    recoveries: int = 0
    uptime_seconds: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            'total_users': self.total_users,
            'total_records': self.total_records,
            'database_size_mb': round(self.database_size_mb, 2),
            'last_backup': self.last_backup,
            'last_save': self.last_save,
            'save_count': self.save_count,
            'load_count': self.load_count,
            'error_count': self.error_count,
            'recoveries': self.recoveries,
            'uptime_hours': round(self.uptime_seconds / 3600, 2)
        }

class StoreBackups:
    """Gzip snapshots of the store data, newest kept"""

    def __init__(self, backup_dir: Path, prefix: str, keep: int = 10):
        self.backup_dir = Path(backup_dir)
        self.prefix = prefix
        self.keep = keep
        self.backup_dir.mkdir(parents=True, exist_ok=True)

    def paths(self) -> List[Path]:
        """Snapshot files, newest first; names embed the timestamp"""
        return sorted(self.backup_dir.glob(f"{self.prefix}-*.json.gz"), key=lambda p: p.name, reverse=True)

    def write(self, data: Dict[str, Any]) -> Path:
        stamp = datetime.now().strftime('%Y%m%d_%H%M%S_%f')
        path = self.backup_dir / f"{self.prefix}-{stamp}.json.gz"
        suffix = 1
        while path.exists():
            path = self.backup_dir / f"{self.prefix}-{stamp}_{suffix}.json.gz"
            suffix += 1

        with gzip.open(path, 'wt', encoding='utf-8') as f:
            json.dump(data, f, ensure_ascii=False)
        logger.info(f"💾 Snapshot written: {path.name}")
        self._rotate()
        return path

    def newest_valid(self, validate: Callable[[Any], Dict[str, Any]]) -> Optional[Tuple[Path, Dict[str, Any]]]:
        """First snapshot, newest first, that loads and passes validate"""
        for path in self.paths():
            try:
                with gzip.open(path, 'rt', encoding='utf-8') as f:
                    return path, validate(json.load(f))
            except (OSError, EOFError, json.JSONDecodeError, UnicodeDecodeError, DatabaseCorruptionError) as e:
                logger.warning(f"Skipping unreadable snapshot {path.name}: {e}")
        return None

    def describe(self) -> List[Dict[str, Any]]:
        return [
            {'name': path.name, 'path': str(path), 'size_mb': path.stat().st_size / (1024 * 1024)}
            for path in self.paths()
        ]

    def _rotate(self) -> None:
        for path in self.paths()[self.keep:]:
            try:
                path.unlink()
                logger.info(f"Removed old snapshot: {path.name}")
            except OSError as e:
                logger.error(f"Failed to remove snapshot {path.name}: {e}")

# ===== STORE CONTRACT =====

def _empty_data() -> Dict[str, Any]:
    return {'__version__': STORE_VERSION, 'users': {}, 'global': {}}

class KeyedRecordStore(ABC):
    """Collections of JSON records addressed by (user, collection, record id).

    Omitting user_id addresses the global collections. Atomicity is per record:
    every mutating call is persisted before it returns.
    """

    def __init__(self):
        self._data: Dict[str, Any] = _empty_data()
        self._lock = threading.RLock()
        self.stats = DatabaseStats()
        self.start_time = time.time()

    # ----- internals -----

    def _collection(self, collection: str, user_id: Optional[str], create: bool = False) -> Optional[Dict[str, Record]]:
        if user_id is None:
            scope = self._data['global']
        else:
            scope = self._data['users'].get(user_id)
            if scope is None:
                if not create:
                    return None
                scope = self._data['users'].setdefault(user_id, {})
        if create:
            return scope.setdefault(collection, {})
        return scope.get(collection)

    def _persist(self) -> None:
        """Write-through hook"""

    # ----- public API -----

    def get_all(self, collection: str, user_id: Optional[str] = None,
                order_by: Optional[str] = None, descending: bool = False) -> List[Record]:
        """All records of a collection, optionally ordered by one field"""
        with self._lock:
            records = [copy.deepcopy(r) for r in (self._collection(collection, user_id) or {}).values()]

        if order_by:
            present = [r for r in records if r.get(order_by) is not None]
            missing = [r for r in records if r.get(order_by) is None]
            present.sort(key=lambda r: r[order_by], reverse=descending)
            records = present + missing
        return records

    def get(self, collection: str, record_id: str, user_id: Optional[str] = None) -> Optional[Record]:
        with self._lock:
            record = (self._collection(collection, user_id) or {}).get(record_id)
            return copy.deepcopy(record) if record is not None else None

    def create(self, collection: str, data: Record, user_id: Optional[str] = None,
               record_id: Optional[str] = None) -> str:
        """Insert a record; returns its id (generated when not given)"""
        record_id = record_id or str(uuid.uuid4())
        self.set(collection, record_id, data, user_id)
        return record_id

    def _commit(self, snapshot: Dict[str, Any]) -> None:
        """Persist; on failure put back the sections captured in snapshot and re-raise"""
        try:
            self._persist()
        except DatabaseError:
            self._data.update(snapshot)
            logger.error("Store write failed, in-memory change rolled back")
            raise

    def _scope_snapshot(self, user_id: Optional[str]) -> Dict[str, Any]:
        """Copy of the section a write to user_id touches"""
        if user_id is None:
            return {'global': copy.deepcopy(self._data['global'])}
        users = dict(self._data['users'])
        if user_id in users:
            users[user_id] = copy.deepcopy(users[user_id])
        return {'users': users}

    def set(self, collection: str, record_id: str, data: Record, user_id: Optional[str] = None) -> None:
        """Insert or replace a record"""
        with self._lock:
            snapshot = self._scope_snapshot(user_id)
            self._collection(collection, user_id, create=True)[record_id] = copy.deepcopy(data)
            self._commit(snapshot)

    def delete(self, collection: str, record_id: str, user_id: Optional[str] = None) -> bool:
        with self._lock:
            records = self._collection(collection, user_id)
            if not records or record_id not in records:
                return False
            snapshot = self._scope_snapshot(user_id)
            del records[record_id]
            self._commit(snapshot)
            return True

    def clear_user(self, user_id: str) -> int:
        """Remove every collection of a user; returns the number of records removed"""
        with self._lock:
            if user_id not in self._data['users']:
                return 0
            snapshot = self._scope_snapshot(user_id)
            scope = self._data['users'].pop(user_id)
            self._commit(snapshot)
            removed = sum(len(records) for records in scope.values())
        logger.info(f"Cleared {removed} records of user {user_id}")
        return removed

    def user_ids(self) -> List[str]:
        with self._lock:
            return list(self._data['users'].keys())

    def _update_stats(self) -> None:
        users = self._data['users']
        self.stats.total_users = len(users)
        self.stats.total_records = (
            sum(len(records) for scope in users.values() for records in scope.values())
            + sum(len(records) for records in self._data['global'].values())
        )
        self.stats.uptime_seconds = int(time.time() - self.start_time)

    def get_stats(self) -> Dict[str, Any]:
        with self._lock:
            self._update_stats()
        return self.stats.to_dict()

    def get_health_status(self) -> Dict[str, Any]:
        stats = self.get_stats()
        issues = []
        if self.stats.error_count:
            issues.append("Store errors recorded")
        if self.stats.recoveries:
            issues.append("Recovered from corruption")
        return {
            'status': "healthy" if not issues else "warning",
            'issues': issues,
            'stats': stats
        }

    async def start(self) -> None:
        """Start background jobs; needs a running event loop"""

    async def shutdown(self) -> None:
        """Stop background jobs"""

class MemoryRecordStore(KeyedRecordStore):
    """Process-local store"""

# ===== JSON FILE STORE =====

class JsonFileRecordStore(KeyedRecordStore):
    """Store persisted to a single JSON file"""

    def __init__(self, data_file: Path, backup_dir: Optional[Path] = None, max_backups: int = 10,
                 backup_interval_hours: int = 6, auto_backup: bool = True):
        super().__init__()
        self.data_file = Path(data_file)
        self.backups = StoreBackups(backup_dir or self.data_file.parent / "backups", self.data_file.stem, max_backups)
        self.backup_interval_hours = backup_interval_hours
        self.auto_backup = auto_backup
        self.scheduler: Optional[AsyncIOScheduler] = None
        self.is_initialized = False

        self._initialize()

    def _initialize(self) -> None:
        try:
            logger.info("Initializing record store...")
            self.data_file.parent.mkdir(parents=True, exist_ok=True)
            self._load_sync()
            self.is_initialized = True
            logger.info(f"Record store initialized with {len(self._data['users'])} users")
        except OSError as e:
            logger.error(f"Failed to initialize record store: {e}")
            raise DatabaseConnectionError(f"Record store initialization failed: {e}") from e

    def _load_sync(self) -> None:
        if not self.data_file.exists():
            logger.info("Store file does not exist, starting with empty store")
            self.stats.load_count += 1
            return

        try:
            with self._lock:
                with open(self.data_file, 'r', encoding='utf-8') as f:
                    data = json.load(f)
                self._data = self._validate_structure(data)
                self.stats.load_count += 1
                self._update_stats()
            logger.info(f"Loaded {self.stats.total_records} records from {self.data_file}")

        except (json.JSONDecodeError, UnicodeDecodeError, DatabaseCorruptionError) as e:
            logger.error(f"Store file is corrupted: {e}")
            self.stats.error_count += 1
            self._handle_corruption()

    @staticmethod
    def _validate_structure(data: Any) -> Dict[str, Any]:
        if not isinstance(data, dict):
            raise DatabaseCorruptionError("Top level is not an object")
        users = data.get('users', {})
        global_ = data.get('global', {})
        if not isinstance(users, dict) or not isinstance(global_, dict):
            raise DatabaseCorruptionError("Missing users/global sections")
        return {'__version__': data.get('__version__', STORE_VERSION), 'users': users, 'global': global_}

    def _handle_corruption(self) -> None:
        """Keep the unreadable file aside, then restore the newest valid snapshot or start empty"""
        logger.warning("Attempting to recover from store corruption...")
        self.stats.recoveries += 1

        corrupt_copy = self.data_file.with_suffix('.corrupt')
        shutil.copy2(self.data_file, corrupt_copy)
        logger.info(f"Unreadable store kept as {corrupt_copy.name}")

        restored = self.backups.newest_valid(self._validate_structure)
        with self._lock:
            if restored is None:
                logger.warning("No readable snapshot, starting with empty store")
                self._data = _empty_data()
            else:
                path, self._data = restored
                logger.warning(f"Restored store from snapshot: {path.name}")
            self._save_data_sync(self._data)
            self._update_stats()

    def _persist(self) -> None:
        self._save_data_sync(self._data)

    def _save_data_sync(self, data: Dict[str, Any]) -> None:
        """Atomic save: write a temporary file, then replace the store file"""
        with self._lock:
            temp_file = self.data_file.with_suffix('.tmp')
            try:
                with open(temp_file, 'w', encoding='utf-8') as f:
                    json.dump(data, f, ensure_ascii=False, indent=2)
                temp_file.replace(self.data_file)
            except (OSError, TypeError, ValueError) as e:
                self.stats.error_count += 1
                if temp_file.exists():
                    temp_file.unlink()
                raise DatabaseError(f"Failed to save store: {e}") from e

            self.stats.save_count += 1
            self.stats.last_save = datetime.now().isoformat()

    def create_backup(self) -> Optional[Path]:
        """Snapshot the current in-memory data"""
        try:
            with self._lock:
                path = self.backups.write(self._data)
        except (OSError, TypeError, ValueError) as e:
            self.stats.error_count += 1
            logger.error(f"Failed to write snapshot: {e}")
            return None
        self.stats.last_backup = datetime.now().isoformat()
        return path

    def get_backups(self) -> List[Dict[str, Any]]:
        return self.backups.describe()

    def get_stats(self) -> Dict[str, Any]:
        stats = super().get_stats()
        if self.data_file.exists():
            stats['database_size_mb'] = round(self.data_file.stat().st_size / (1024 * 1024), 2)
        stats['backups'] = len(self.backups.paths())
        return stats

    # ----- scheduling -----

    async def _periodic_backup(self) -> None:
        if self.create_backup():
            logger.info("Periodic backup completed")

    async def start(self) -> None:
        """Schedule periodic backups"""
        if not self.auto_backup or self.scheduler:
            return

        self.scheduler = AsyncIOScheduler()
        self.scheduler.add_job(
            self._periodic_backup,
            IntervalTrigger(hours=self.backup_interval_hours),
            id='periodic_backup',
            replace_existing=True
        )
        self.scheduler.start()
        logger.info("Store backup scheduler started")

    async def shutdown(self) -> None:
        """Stop the scheduler and take a final backup"""
        logger.info("Shutting down record store...")
        if self.scheduler and self.scheduler.running:
            self.scheduler.shutdown(wait=False)
        self.scheduler = None
        if self.auto_backup:
            self.create_backup()
        logger.info("Record store shutdown completed")

# ===== CONVENIENCE FUNCTIONS =====

def create_record_store(db_config=None) -> JsonFileRecordStore:
    """JSON store from configuration"""
    if db_config is None:
        from sahaayak.config import config
        db_config = config.database

    return JsonFileRecordStore(
        data_file=db_config.path,
        backup_dir=db_config.backup_dir,
        max_backups=db_config.max_backups,
        backup_interval_hours=db_config.backup_interval_hours,
        auto_backup=db_config.auto_backup
    )

__all__ = [
    'STORE_VERSION',
    'DatabaseError', 'DatabaseConnectionError', 'DatabaseCorruptionError',
    'DatabaseStats', 'StoreBackups',
    'KeyedRecordStore', 'MemoryRecordStore', 'JsonFileRecordStore',
    'create_record_store'
]
