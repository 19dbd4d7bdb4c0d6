"""Framework-free domain rules: enumerations, access policies, status
transitions, bulk action vocabularies, the tax calculator and reminders."""
