"""
Book catalog feature: HTTP routes, business rules and the `books` table SQL.
"""
