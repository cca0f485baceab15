import setuptools

with open("README.md", "r", encoding="utf-8") as f:
  long_description = f.read()

setuptools.setup(
  name="tensorview",
  version="0.0.1",
  author="borgwang",
  author_email="badbobobo@gamil.com",
  description="Broadcasting negotiation for strided elementwise tensor operations",
  long_description=long_description,
  long_description_content_type="text/markdown",
  packages=setuptools.find_packages(include=["tensorview", "tensorview.*"]),
  classifiers=[
      "Programming Language :: Python :: 3",
      "License :: OSI Approved :: MIT License",
  ],
  install_requires=["numpy"],
  python_requires=">=3.8",
  extras_require={
    "linting": ["flake8", "pylint", "mypy", "pre-commit"],
    "testing": ["pytest"],
  }
)
