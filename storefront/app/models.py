from __future__ import annotations

from datetime import datetime

from storefront.app.extensions import db


class StoredState(db.Model):
    """One persisted store record for one visitor.

    `owner` is the visitor id kept in the session cookie, `key` the store
    namespace (cart, customer, recently_viewed).
    """

    __tablename__ = "stored_state"

    id = db.Column(db.Integer, primary_key=True)
    owner = db.Column(db.String(64), nullable=False, index=True)
    key = db.Column(db.String(64), nullable=False)
    payload = db.Column(db.Text, nullable=False)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    __table_args__ = (
        db.UniqueConstraint("owner", "key", name="uq_stored_state_owner_key"),
    )
