"""
Application layer package.

Contains the data-synchronization layer (keyed one-shot and polling
queries, page-level query groups) and the market pages built on it.
Depends on the domain layer only through ports.
"""
