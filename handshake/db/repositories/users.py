from sqlalchemy.orm import Session
from handshake.db.models import Counter, User, utcnow
from typing import List, Optional

class UserRepository:
    """Repository for users seen in searches."""

    def __init__(self, db: Session):
        self.db = db

    def get_user(self, id64: str) -> Optional[User]:
        return self.db.query(User).filter(User.id64 == id64).first()

    def upsert_user(self, id64: str, name: str, avatar: str, commit: bool = True) -> User:
        """
        Create a user or refresh its name, avatar and last-seen time.

        Args:
            id64: SteamID64
            name: Current persona name
            avatar: Small avatar URL
            commit: Commit immediately; pass False to batch with other writes

        Returns:
            The stored user
        """
        user = self.get_user(id64)
        if user is None:
            user = User(id64=id64, name=name, avatar=avatar)
            self.db.add(user)
        else:
            user.name = name
            user.avatar = avatar
            user.last_seen_at = utcnow()
        if commit:
            self.db.commit()
            self.db.refresh(user)
        return user


class CounterRepository:
    """Repository for per-user search counters."""

    def __init__(self, db: Session):
        self.db = db

    def get(self, entity_id64: str) -> int:
        counter = self.db.query(Counter).filter(Counter.entity_id64 == entity_id64).first()
        return counter.search_count if counter else 0

    def increment(self, entity_id64: str, commit: bool = True) -> int:
        """Add one search to a user's counter and return the new count."""
        counter = self.db.query(Counter).filter(Counter.entity_id64 == entity_id64).first()
        if counter is None:
            counter = Counter(entity_id64=entity_id64, search_count=0)
            self.db.add(counter)
        counter.search_count = (counter.search_count or 0) + 1
        if commit:
            self.db.commit()
        return counter.search_count

    def top_targets(self, limit: int = 10) -> List[Counter]:
        return (
            self.db.query(Counter)
            .order_by(Counter.search_count.desc(), Counter.entity_id64)
            .limit(limit)
            .all()
        )
