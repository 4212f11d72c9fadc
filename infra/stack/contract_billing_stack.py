import os

from aws_cdk import (
    aws_lambda as _lambda,
    aws_apigateway as apigw,
    CfnOutput,
    Duration,
)
from constructs import Construct
from constructs_lib.base_lambda_stack import BaseServiceStack

# Repo root holds the Dockerfile shared by every handler image
IMAGE_ASSET_DIR = os.path.join(os.path.dirname(__file__), "..", "..")

RUNTIME_ENV_VARS = (
    "WAVE_API_KEY",
    "WAVE_BUSINESS_ID",
    "WAVE_CURRENCY",
    "WAVE_PRODUCT_ID",
    "WAVE_PRODUCT_ID_CORE",
    "WAVE_PRODUCT_ID_GROWTH",
    "WAVE_PRODUCT_ID_FULL",
    "WAVE_INCOME_ACCOUNT_ID",
    "GITHUB_TOKEN",
    "GITHUB_REPO",
    "GITHUB_BRANCH",
    "GITHUB_CONTRACTS_DIR",
    "HTTP_TIMEOUT_SECONDS",
    "LOG_LEVEL",
)

# (construct id, function base name, image cmd, route, methods)
HANDLERS = (
    ("CreateInvoice", "CreateInvoice",
     "contract_billing.invoice.lambda_function.lambda_handler", "create-invoice", ("POST",)),
    ("UploadContract", "UploadContract",
     "contract_billing.contracts.lambda_function.lambda_handler", "upload-contract", ("POST",)),
    ("CreateProducts", "CreateProducts",
     "contract_billing.products.lambda_function.lambda_handler", "create-products", ("POST", "GET")),
    ("ListAccounts", "ListAccounts",
     "contract_billing.listing.lambda_function.list_accounts_handler", "list-accounts", ("GET",)),
    ("ListProducts", "ListProducts",
     "contract_billing.listing.lambda_function.list_products_handler", "list-products", ("GET",)),
    ("ListBusinesses", "ListBusinesses",
     "contract_billing.listing.lambda_function.list_businesses_handler", "test-wave-business", ("GET",)),
)


class ContractBillingStack(BaseServiceStack):

    def __init__(self, scope: Construct, construct_id: str, **kwargs) -> None:
        super().__init__(scope, construct_id, service_name="contract-billing", **kwargs)

        environment = self.function_environment(RUNTIME_ENV_VARS)

        api = apigw.RestApi(
            self, "ContractBillingApi",
            rest_api_name=self.function_name("ContractBillingApi"),
            default_cors_preflight_options=apigw.CorsOptions(
                allow_origins=apigw.Cors.ALL_ORIGINS,
                allow_methods=["GET", "POST", "OPTIONS"],
            ),
        )

        self.functions = {}
        for construct_id_, base_name, cmd, route, methods in HANDLERS:
            fn = _lambda.DockerImageFunction(
                self,
                construct_id_,
                function_name=self.function_name(base_name),
                code=_lambda.DockerImageCode.from_image_asset(
                    IMAGE_ASSET_DIR,
                    cmd=[cmd],
                    exclude=["infra", "tests", ".git"],
                ),
                environment=environment,
                timeout=Duration.seconds(30),
                memory_size=256,
            )
            resource = api.root.add_resource(route)
            integration = apigw.LambdaIntegration(fn)
            for method in methods:
                resource.add_method(method, integration)
            self.functions[base_name] = fn

        CfnOutput(self, "ApiUrl", value=api.url)
