"""Service layer for business logic.

Layer hierarchy:
    Routes (HTTP) -> Services (Business Logic) -> Repositories (Database)

- dates_service: UTC calendar days, day identifiers, injectable clocks
- streaks_service: current / longest streak over a set of days
- stats_service: pure dashboard and per-habit statistics
- habits_service: habit management and completion tracking; loads
  snapshots through the repositories and hands them to stats_service

Services raise domain exceptions; routes map them to HTTP status codes.
"""
