import uvicorn

from storefront import config


def main():
    uvicorn.run("storefront.app:app", host=config.HOST, port=config.PORT)


if __name__ == "__main__":
    main()
