"""
reset_data.py
-------------
Utility script to clear all stored data (listings, bookings, reviews, favorites)
from the local data.pkl file (or whatever CARSHARE_DATA_PATH points at).

This script is designed for development and testing purposes.

Usage:
    $ python reset_data.py

After running this script, you can repopulate sample data by executing:
    $ python seeds.py
"""

from carshare.models.store import Store


def main():
    """Clear every collection and id counter, then persist the empty store."""
    store = Store.instance()
    store.clear()
    store.save()

    print(f"✅ {store.path or 'in-memory store'} has been successfully cleared.")
    print("💡 Tip: Run `python seeds.py` to regenerate demo data.")


if __name__ == "__main__":
    main()
