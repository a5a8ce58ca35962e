"""
Repository package for data access layers.

You can provide a custom audit store by setting the environment variable
`AUDIT_STORE_IMPL` to a dotted path like:

    myapp.data.audit:KafkaAuditStore

and ensuring that class implements `app.repositories.audit.AuditStoreProtocol`.
"""
