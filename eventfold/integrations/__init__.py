"""Storage integrations for eventfold.

Each integration lives in its own subpackage so its driver is only imported
when used:

- eventfold.integrations.dynamodb: Partitioned store on Amazon DynamoDB
- eventfold.integrations.sql: Relational store on SQLAlchemy
"""
