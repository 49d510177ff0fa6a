from dynaconf import Dynaconf, Validator

settings = Dynaconf(
    settings_files=["settings.toml", ".secrets.toml"],
    environments=True,
    env_switcher="ENV_FOR_DYNACONF",
    envvar_prefix="SOCIALFEED",
    load_dotenv=True,
    validators=[
        Validator("DATABASE_URL", must_exist=True),
        Validator("JWT_SECRET", must_exist=True),
        Validator("JWT_EXPIRATION_SECONDS", default=864000, is_type_of=int),
        Validator("RATE_LIMIT_AUTHENTICATED", default=100, is_type_of=int),
        Validator("RATE_LIMIT_UNAUTHENTICATED", default=20, is_type_of=int),
        Validator("RATE_LIMIT_PERIOD_SECONDS", default=60, is_type_of=int),
        Validator("API_SUPPORTED_VERSIONS", default=["1.0.0"]),
        Validator("BCRYPT_ROUNDS", default=12, gte=4, lte=31),
        Validator("LOG_LEVEL", default="INFO"),
    ],
)
