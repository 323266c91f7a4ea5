"""pricegap core: models, services, storage and ambient infrastructure."""
