"""Generate sample coach workbooks for testing the coach importer."""
import random
import sys

from openpyxl import Workbook

HEADERS = [
    "Unique ID",
    "Removed? (y)",
    "First name",
    "Last name",
    "Position",
    "Email address",
    "Phone number",
    "School",
    "State",
    "City",
    "Conference",
    "Sport code",
    "Average GPA",
    "SAT-Math (25th-75th percentile)",
    "Acceptance rate",
    "Total yearly cost (in-state/out-of-state)",
    "No. of undergrads",
    "Landing pages",
    "Hire date",
    "Responsibilities",
]

BANNER_ROWS = 5


def generate_workbook(num_rows: int, output_file: str) -> None:
    """
    Generate a workbook with random coach rows spread over division sheets.

    Args:
        num_rows: Number of coach rows per division sheet
        output_file: Output .xlsx file path
    """
    first_names = ["Alex", "Jordan", "Sam", "Taylor", "Morgan", "Casey", "Riley", "Jamie"]
    last_names = ["Smith", "Garcia", "Nguyen", "Okafor", "Schmidt", "Rossi", "Kim", "Lee"]
    positions = ["Head Coach", "Assistant Coach", "Director of Track & Field", "Volunteer Assistant"]
    schools = [
        ("Northfield University", "MN", "Northfield"),
        ("Lakeside College", "WI", "Madison"),
        ("Pacific State", "OR", "Eugene"),
        ("Gulf Coast University", "TX", "Houston"),
    ]
    conferences = ["Big Ten", "Pac-12", "Great Lakes Valley", "American Rivers"]
    sport_codes = ["Men's Track", "Women's Track"]
    responsibilities = [
        "Sprints and hurdles",
        "Distance / XC",
        "Throws (shot put, discus)",
        "Jumps - long jump, pole vault",
        "Multi events",
        "Relays 4x400",
    ]

    workbook = Workbook()
    tutorial = workbook.active
    tutorial.title = "Tutorial"
    tutorial.append(["How to use this workbook"])

    for division in ("DI", "DII", "DIII"):
        sheet = workbook.create_sheet(division)
        for _ in range(BANNER_ROWS):
            sheet.append([f"{division} track & field coaches"])
        sheet.append(HEADERS)

        for i in range(num_rows):
            first = random.choice(first_names)
            last = random.choice(last_names)
            school, state, city = random.choice(schools)
            sheet.append([
                f"{division}-{i + 1:06d}",
                None,
                first,
                last,
                random.choice(positions),
                f"{first.lower()}.{last.lower()}{i}@{school.split()[0].lower()}.edu",
                f"555-{random.randint(100, 999)}-{random.randint(1000, 9999)}",
                school,
                state,
                city,
                random.choice(conferences),
                random.choice(sport_codes),
                f"{random.uniform(2.8, 4.0):.2f}",
                f"{random.randint(450, 600)}-{random.randint(620, 780)}",
                f"{random.randint(10, 95)}%",
                f"${random.randint(15, 80)},{random.randint(100, 999)}",
                f"{random.randint(1, 40)},{random.randint(100, 999)}",
                f"https://athletics.{school.split()[0].lower()}.edu/track",
                None,
                random.choice(responsibilities),
            ])

            # Print progress every 10,000 rows
            if (i + 1) % 10000 == 0:
                print(f"Generated {i + 1:,} {division} rows...")

    workbook.save(output_file)
    print(f"✅ Successfully generated {num_rows:,} coaches per division in {output_file}")


def main():
    """Main function to parse arguments and generate the workbook."""
    if len(sys.argv) < 2:
        print("Usage: python generate_workbook.py <rows_per_sheet> [output_file]")
        print("Example: python generate_workbook.py 500 sample_coaches.xlsx")
        sys.exit(1)

    num_rows = int(sys.argv[1])
    output_file = sys.argv[2] if len(sys.argv) > 2 else f"sample_coaches_{num_rows}.xlsx"

    print(f"Generating workbook with {num_rows:,} rows per sheet...")
    generate_workbook(num_rows, output_file)


if __name__ == "__main__":
    main()
