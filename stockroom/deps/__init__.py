# Marks ``stockroom.deps`` as a package so ``from stockroom.deps.auth import ...`` resolves.
