APP_NAME = "Culqi Payments Backend"
