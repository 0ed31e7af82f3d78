"""
Record store backends behind one asynchronous CRUD contract.

Modules
-------
base    : RecordStore ABC + ListQuery + ENTITY_FIELDS schema + payload checks.
memory  : InMemoryRecordStore — mock data and tests.
sqlite  : SqliteRecordStore — local SQLite file via wellness_coach.db.
remote  : RemoteRecordStore — hosted table API via httpx.
mapping : field translation for the hosted API (Id/Name/reference columns).
factory : build_store(config) — pick a backend from AppConfig.
"""
