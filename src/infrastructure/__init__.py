"""
infrastructure - Concrete implementations of domain ports.

Contains all vendor-specific code: LangChain chat models, aiosqlite.
Depends on domain/ only (implements ports). Never imported by agent/.
"""
