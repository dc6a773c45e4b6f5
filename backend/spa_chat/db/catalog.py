"""Service catalog and business configuration tables."""

from __future__ import annotations

from typing import Sequence

import orjson

from spa_chat.db.sqlite import SQLiteDatabase
from spa_chat.models.entities import BusinessConfig, Service, ServiceAlias
from spa_chat.utils.time import now_ms


class CatalogRepository:
    """Read-mostly access to services, their aliases and the business singleton."""

    def __init__(self, db: SQLiteDatabase) -> None:
        self.db = db

    def list_services(self) -> list[Service]:
        rows = self.db.query(
            "SELECT id, name, duration, price_from, description FROM services ORDER BY position, rowid"
        )
        return [
            Service(
                id=row["id"],
                name=row["name"],
                duration=int(row["duration"]),
                price_from=float(row["price_from"]),
                description=row["description"] or "",
            )
            for row in rows
        ]

    def list_aliases(self) -> list[ServiceAlias]:
        rows = self.db.query(
            """
            SELECT service_aliases.service_id, service_aliases.alias
            FROM service_aliases
            JOIN services ON services.id = service_aliases.service_id
            ORDER BY services.position, services.rowid, service_aliases.rowid
            """
        )
        return [ServiceAlias(service_id=row["service_id"], alias=row["alias"]) for row in rows]

    def replace_services(self, services: Sequence[Service], aliases: Sequence[ServiceAlias]) -> None:
        with self.db.transaction() as cursor:
            cursor.execute("DELETE FROM service_aliases")
            cursor.execute("DELETE FROM services")
            cursor.executemany(
                """
                INSERT INTO services (id, name, duration, price_from, description, position)
                VALUES (?, ?, ?, ?, ?, ?)
                """,
                [
                    (service.id, service.name, service.duration, service.price_from, service.description, position)
                    for position, service in enumerate(services)
                ],
            )
            cursor.executemany(
                "INSERT OR IGNORE INTO service_aliases (service_id, alias) VALUES (?, ?)",
                [(alias.service_id, alias.alias) for alias in aliases],
            )

    def get_business_config(self) -> BusinessConfig | None:
        row = self.db.query_one(
            "SELECT name, phone, email, address, hours_json, policies_json FROM business_config WHERE id = 1"
        )
        if row is None:
            return None
        return BusinessConfig.from_mapping(
            {
                "name": row["name"],
                "phone": row["phone"],
                "email": row["email"],
                "address": row["address"],
                "hours": orjson.loads(row["hours_json"]) if row["hours_json"] else {},
                "policies": orjson.loads(row["policies_json"]) if row["policies_json"] else {},
            }
        )

    def save_business_config(self, config: BusinessConfig) -> None:
        hours = {"mon_fri": config.hours.mon_fri, "sat": config.hours.sat, "sun": config.hours.sun}
        policies = {"cancellation": config.policies.cancellation, "late": config.policies.late}
        self.db.execute(
            """
            INSERT INTO business_config (id, name, phone, email, address, hours_json, policies_json, updated_at)
            VALUES (1, ?, ?, ?, ?, ?, ?, ?)
            ON CONFLICT(id) DO UPDATE SET
              name = excluded.name,
              phone = excluded.phone,
              email = excluded.email,
              address = excluded.address,
              hours_json = excluded.hours_json,
              policies_json = excluded.policies_json,
              updated_at = excluded.updated_at
            """,
            [
                config.name,
                config.phone,
                config.email,
                config.address,
                orjson.dumps(hours).decode("utf-8"),
                orjson.dumps(policies).decode("utf-8"),
                now_ms(),
            ],
        )
        self.db.commit()


__all__ = ["CatalogRepository"]
