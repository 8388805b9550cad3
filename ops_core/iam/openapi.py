from drf_spectacular.extensions import OpenApiAuthenticationExtension


class ScopedJWTAuthenticationScheme(OpenApiAuthenticationExtension):
    target_class = "ops_core.iam.auth.ScopedJWTAuthentication"
    name = "BearerJWT"

    def get_security_definition(self, auto_schema):
        return {
            "type": "http",
            "scheme": "bearer",
            "bearerFormat": "JWT",
            "description": (
                "Send the access token via `Authorization: Bearer <token>` "
                "together with the X-Tenant-Id scope header."
            ),
        }
