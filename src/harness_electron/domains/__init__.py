"""Domain packages for harness-electron.

- shared: identifiers shared by every context
- timeout: budgets and deadlines
- selector: canonical selector model and CLI normalization
- session: persisted session records and the file-backed store
- resolver: selector / element reference to live locator resolution
"""
