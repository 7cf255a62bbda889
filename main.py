from fastapi import FastAPI
from mangum import Mangum

from assetproxy import AssetProxy
from dotenv import load_dotenv


load_dotenv()

asset_proxy = AssetProxy()
app = FastAPI()


asset_proxy.to_fastapi(app)


handler = Mangum(app)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=asset_proxy.config.PORT)
