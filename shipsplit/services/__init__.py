# Services layer for allocation, validation and label issuance
