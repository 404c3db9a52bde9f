# Request/response and gateway payload schemas
