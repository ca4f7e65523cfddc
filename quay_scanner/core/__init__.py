# Core building blocks: configuration, image references, Quay client, scanner pool and formatters
