import setuptools

with open("README.md", "r", encoding="utf-8") as fh:
    long_description = fh.read()

setuptools.setup(
    author="Aptos Labs",
    author_email="opensource@aptoslabs.com",
    classifiers=[
        "Programming Language :: Python :: 3",
        "License :: OSI Approved :: Apache Software License",
        "Operating System :: OS Independent",
    ],
    entry_points={"console_scripts": ["txblock=txblock_sdk.cli:run"]},
    extras_require={"test": ["pytest"]},
    include_package_data=True,
    install_requires=["pydantic>=2.0", "typing_extensions"],
    long_description=long_description,
    long_description_content_type="text/markdown",
    name="txblock_sdk",
    packages=["txblock_sdk"],
    python_requires=">=3.8",
    url="https://github.com/aptos-labs/aptos-core",
    version="0.1.0",
)
