"""Score Server CI/CD Pipeline - Dagger Module.

Tests the score-server Go project, packages it into a container image,
optionally publishes the image to Harbor, and runs it as a service.

Usage:
    dagger call verify                        # go vet
    dagger call check-all                     # vet, staticcheck, go test
    dagger call build-and-package             # image, not published
    dagger call build-and-package --token=env:VAULT_TOKEN
    dagger call run-as-service up             # http://localhost:5800
"""

from .main import ScoreServer as ScoreServer
