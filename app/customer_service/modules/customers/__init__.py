"""
Customers module.

Scope:
- Customers CRUD over JSON (create, read, partial update, delete)
- One table, `customers`, with a unique email
"""
