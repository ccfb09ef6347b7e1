"""
steam-handshake Application Package

Directory Structure:
├── routers/           # FastAPI route handlers
├── schemas/           # Pydantic models for API requests/responses
│   └── api_schemas.py # HTTP request/response structures
├── application/       # Use cases: path engine, search service, history, maintenance
├── domain/            # Entities, identifiers, errors, events and ports
├── services/          # Infrastructure services
│   ├── cache/         # In-memory and Redis stores behind a JSON cache manager
│   └── directory/     # Steam Web API client with retry policy
├── db/                # SQLAlchemy models and repositories for search history
└── config.py          # Application configuration

Two kinds of storage:
1. **Cache** (handshake.services.cache): short lived profiles, friend lists and search
   results, in process memory or Redis
2. **History** (handshake.db): durable record of searches, users and search counters
"""
