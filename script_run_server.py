"""Start the FastAPI dev server (PORT, default 8000)."""
import os

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "glassworks.main:app",
        host=os.getenv("HOST", "0.0.0.0"),
        port=int(os.getenv("PORT", "8000")),
        reload=True,
    )
