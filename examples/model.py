"""
AWS DynamoDB Movies Table Example

Following the official AWS DynamoDB Getting Started guide:
https://docs.aws.amazon.com/amazondynamodb/latest/developerguide/GettingStartedDynamoDB.html
"""

from kettle import (
    ConditionalCheckFailedError,
    KettleConfig,
    QueryOptions,
    Record,
    SaveOptions,
    UpdateAction,
    UpdateOptions,
)


class Movie(Record):
    """Movie record with composite key (year + title)"""

    class Meta:
        table_name = "Movies"
        hash_key = "year"
        range_key = "title"
        schema = {
            "year": "N",
            "title": "S",
            "plot": "S",
            "rating": "N",
            "votes": "N",
            "actors": "SS",
            "genres": "SS",
        }


config = KettleConfig(region_name="us-east-1")

# Create movies
rush = Movie.factory(config=config).create(
    {
        "year": 2013,
        "title": "Rush",
        "plot": "A re-creation of the 1970s rivalry between Formula One rivals.",
        "rating": 8.1,
        "actors": ["Daniel Brühl", "Chris Hemsworth", "Olivia Wilde"],
        "genres": ["Biography", "Drama", "Sport"],
    }
)
rush.save()

prisoners = Movie.factory(client=rush.client).create(
    {
        "year": 2013,
        "title": "Prisoners",
        "plot": "When Keller Dover's daughter goes missing, he takes matters into his own hands.",
        "rating": 8.1,
        "actors": ["Hugh Jackman", "Jake Gyllenhaal", "Viola Davis"],
        "genres": ["Crime", "Drama", "Mystery"],
    }
)
prisoners.save(SaveOptions(force_update=True))

# Get a movie
movie = Movie.factory(client=rush.client).find_one(2013, "Rush")
if movie:
    print(f"Found: {movie.get('title')} ({movie.get('year')}) - {movie.get('rating')}/10")

# Query movies by year
movies_2013 = Movie.factory(client=rush.client).where("year", 2013).find_many()
print(f"\nMovies from 2013: {len(movies_2013)}")
for m in movies_2013:
    print(f"  - {m.get('title')}: {m.get('rating')}/10")

# Titles starting with "P", newest first
query = Movie.factory(client=rush.client).where("year", 2013).where("title", "^", "P")
for m in query.find_many(QueryOptions(scan_index_forward=False)):
    print(f"  - {m.get('title')}")

# Page through a year two movies at a time
pager = Movie.factory(client=rush.client).where("year", 2013).limit(2)
while True:
    page = pager.find_page()
    print(f"Page of {page.count}")
    if not page.has_more:
        break
    pager.set_exclusive_start_key(page.last_evaluated_key)

# Update with optimistic concurrency
if movie:
    movie.set("rating", 8.2)
    movie.set_add("genres", "Action")
    try:
        movie.save()
    except ConditionalCheckFailedError:
        print("Someone else changed this movie, reload and retry")

    # Atomic counter
    movie.update_item({"votes": 1}, UpdateOptions(actions={"votes": UpdateAction.ADD}))

    # Delete a movie
    old = movie.delete()
    print(f"Deleted: {old}")
