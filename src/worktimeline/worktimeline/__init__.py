"""Work timeline package.

Feature modules (lunch, scheduling, pdtv, mirror, history, ...) hold the domain
logic; a thin Flask controller layer and the export service wrap them.
"""
