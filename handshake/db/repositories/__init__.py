from handshake.db.repositories.searches import SearchRepository
from handshake.db.repositories.users import UserRepository, CounterRepository

__all__ = ['SearchRepository', 'UserRepository', 'CounterRepository']
